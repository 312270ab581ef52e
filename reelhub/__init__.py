"""ReelHub realtime notification core.

Delivers movie-platform events to users' live websocket connections and keeps
undelivered ones in the database until the user reconnects.
"""
