"""Service configuration from environment variables (and .env)."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / ".env")

STORE_URL = os.getenv("STORE_URL", "memory://").strip()

ISSUER_URL = os.getenv("ISSUER_URL", "").strip()
ISSUER_API_KEY = os.getenv("ISSUER_API_KEY", "").strip()
ISSUER_TIMEOUT_SECONDS = float(os.getenv("ISSUER_TIMEOUT_SECONDS", "30"))
REWARD_DECIMALS = int(os.getenv("REWARD_DECIMALS", "9"))

CLAIM_REWARD_CAPS = int(os.getenv("CLAIM_REWARD_CAPS", "25"))
CLAIM_COOLDOWN_SECONDS = int(os.getenv("CLAIM_COOLDOWN_SECONDS", "86400"))
EXPLORER_TX_URL = os.getenv(
    "EXPLORER_TX_URL", "https://solscan.io/tx/{signature}?cluster=devnet"
).strip()

LOCATIONS_PATH = os.getenv("LOCATIONS_PATH", "").strip()
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "https://atomicfizzcaps.xyz").split(",")
    if origin.strip()
]
ADMIN_API_KEY = os.getenv("ADMIN_API_KEY", "").strip()
