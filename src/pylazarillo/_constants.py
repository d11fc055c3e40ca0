"""Internal constants shared across the library."""

MAPS_BASE_URL = "https://maps.googleapis.com/maps/api"
TWILIO_BASE_URL = "https://api.twilio.com/2010-04-01"
DEFAULT_EMERGENCY_NUMBER = "+5493816694178"

#: Exact answer the destination prompt asks for when nothing usable is found.
NO_DESTINATION_SENTINEL = "NO_DESTINO"

RESPONSE_EVENT = "respuesta"
ERROR_EVENT = "error"

# ------------------------------------------------------------------
# User-facing replies (narrated by the client's text-to-speech)
# ------------------------------------------------------------------

MSG_NO_DESTINATION = "No pude encontrar el destino. ¿Podrías repetirlo?"
MSG_GEOCODING_FAILED = "No se pudo encontrar la ubicación exacta del destino."
MSG_WAITING_LOCATION = "Esperando tu ubicación... intenta nuevamente en unos segundos."
MSG_ROUTE_UNAVAILABLE = "No se pudo generar una ruta válida. Verifica tu ubicación y destino."
MSG_DESTINATION_FOUND = "Destino encontrado: {name}. Puedes iniciar el recorrido."
MSG_ARRIVED = "🏁 ¡Has llegado a tu destino!"
MSG_NEXT_STEP = "Siguiente paso: {step}"
MSG_REPEAT_STEP = "Repetimos: {step}"
MSG_NO_ROUTE = "No hay una ruta generada. Encuentra un destino primero."
MSG_TRAVERSAL_STARTED = "El recorrido ha iniciado. Primer paso: {step}"
MSG_NO_DESTINATION_SELECTED = "Aún no has seleccionado un destino. Encuentra un destino primero."
MSG_DESCRIBE_FAILED = "No pude obtener información sobre el destino en este momento."
MSG_EMERGENCY_SENT = "Mensaje de emergencia enviado"
MSG_RESET = "Navegación cancelada. Puedes pedir un nuevo destino cuando quieras."
