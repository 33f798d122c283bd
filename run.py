from app import create_app
import os

app = create_app()

if __name__ == "__main__":
    port = int(os.getenv("PORT", 5050))
    app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)

# Local:
# docker compose up -d            (postgres + redis)
# alembic upgrade head
# python scripts/seed.py
# flask --app app:create_app --debug run
#
# Status sweep (replaces the dashboard's 2-minute timer):
# flask --app app:create_app sweep-pending
# flask --app app:create_app sweep-pending --once
#
# Optional queue worker (USE_TASK_QUEUE=1):
# rq worker -u $REDIS_URL
