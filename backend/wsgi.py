"""WSGI entry point (gunicorn "wsgi:app", flask --app wsgi)."""
from kasir import create_app

app = create_app()

if __name__ == "__main__":
    app.run()
