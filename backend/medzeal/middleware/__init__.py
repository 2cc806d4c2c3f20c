"""
MedZeal Backend: Middleware Package
====================================

Request path (outermost first, as registered in main.create_app):

    RequestID → RequestLogging → RateLimit → GZip → CORS → route

    RequestID   sets the correlation ID the other layers and handlers log
    Logging     one access line per request, with status and duration
    RateLimit   answers excess writes from one IP with 429 before the route runs
"""
