"""Run the server directly: ``python app.py``.

Imported by a WSGI host or ``flask --app app run``, the module exposes
``app``; run as a script it goes through ``main``, which adds the HTTP/HTTPS
selection and fixed timeouts.
"""

from swarmhub import create_app
from swarmhub.server import main

# -------------------------------------------------------------------
# Startup
# -------------------------------------------------------------------
if __name__ == "__main__":
    main()
else:
    app = create_app()
