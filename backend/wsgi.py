# Overview: WSGI entrypoint; `python wsgi.py` serves on $PORT (default 8080).

from stampcard import create_app

app = create_app()


if __name__ == "__main__":
    # Threaded: requests share the in-memory state guarded by service locks
    app.run(host="0.0.0.0", port=app.config["PORT"], threaded=True)
