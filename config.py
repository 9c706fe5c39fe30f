import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./classbook.db")
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Credits / pricing
    CREDITS_TO_CENTS_RATIO = data.get("CREDITS_TO_CENTS_RATIO", 50)  # 1 credit = 50 cents
    WELCOME_BONUS_CREDITS = data.get("WELCOME_BONUS_CREDITS", 10)
    BOOKING_CASHBACK_RATE = data.get("BOOKING_CASHBACK_RATE", 0.03)  # Points per paid cent
    LATE_CANCELLATION_REFUND_RATE = data.get("LATE_CANCELLATION_REFUND_RATE", 0.5)

    # Outbox / follow-up worker
    NOTIFICATION_WEBHOOK_URL = data.get("NOTIFICATION_WEBHOOK_URL", None)
    OUTBOX_BATCH_SIZE = data.get("OUTBOX_BATCH_SIZE", 100)
    OUTBOX_POLL_INTERVAL_SECONDS = data.get("OUTBOX_POLL_INTERVAL_SECONDS", 5)

    # Balance reconciliation
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 86400)  # Daily

    # External collaborators used by the outbox worker
    GEOCODING_URL = data.get("GEOCODING_URL", None)
