from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, List

import pytz

TZ = pytz.timezone("Europe/Moscow")

WALLETS_FILE = "wallets.txt"
PROXIES_FILE = "proxies.txt"
ENDPOINTS_FILE = "endpoints.json"

EXPLORER_BASE = "https://testnet.kitescan.ai"
USAGE_URL = "https://quests-usage-dev.prod.zettablock.com/api/report_usage"

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

TX_ANALYZER_URL = "https://deployment-sofftlsf9z4fya3qchykaanq.stag-vxzy.zettablock.com/main"
TX_PROMPT_TEMPLATE = "Analyze this transaction in detail: {tx_hash}"

DEFAULT_TARGETS: Dict[str, Dict[str, object]] = {
    "https://deployment-uu9y1z4z85rapgwkss1muuiz.stag-vxzy.zettablock.com/main": {
        "agent_id": "deployment_UU9y1Z4Z85RAPGwkss1mUUiZ",
        "name": "Kite AI Assistant",
        "questions": [
            "What is Kite AI?",
            "How does Kite AI attribute value to AI agents?",
            "What can I build on the Kite AI testnet?",
        ],
    },
    "https://deployment-ecz5o55dh0dbqagkut47kzyc.stag-vxzy.zettablock.com/main": {
        "agent_id": "deployment_ECz5O55dH0dBQaGKuT47kzYC",
        "name": "Crypto Price Assistant",
        "questions": [
            "What is the current price of Bitcoin?",
            "How has Ethereum performed over the last week?",
            "Which tokens moved the most in the last 24 hours?",
        ],
    },
    TX_ANALYZER_URL: {
        "agent_id": "deployment_SoFftlsf9z4fyA3QCHYkaANq",
        "name": "Transaction Analyzer",
        "questions": [],
    },
}


@dataclass(frozen=True)
class AutomationConfig:
    max_daily_points: int = 200
    points_per_interaction: int = 10
    min_delay: float = 1.0
    max_delay: float = 3.0
    skip_backoff: float = 1.0
    reset_interval: dt.timedelta = dt.timedelta(hours=24)
    request_timeout: float = 30.0
    stream_timeout: float = 120.0
    explorer_base: str = EXPLORER_BASE
    usage_url: str = USAGE_URL

    @property
    def max_daily_interactions(self) -> int:
        return self.max_daily_points // self.points_per_interaction


def default_targets() -> Dict[str, Dict[str, object]]:
    out: Dict[str, Dict[str, object]] = {}
    for url, entry in DEFAULT_TARGETS.items():
        questions: List[str] = list(entry["questions"])  # type: ignore[arg-type]
        out[url] = {"agent_id": entry["agent_id"], "name": entry["name"], "questions": questions}
    return out
