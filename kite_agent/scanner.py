from __future__ import annotations

from typing import List

import requests

from .catalog import TargetCatalog
from .client import ProxiedCaller
from .config import TX_PROMPT_TEMPLATE


class TransactionScanner(ProxiedCaller):
    def scan(self) -> List[str]:
        self.log.log("🔍", "Scanning recent transactions...")
        url = f"{self.config.explorer_base.rstrip('/')}/api/v2/advanced-filters"
        params = {"transaction_types": "coin_transfer", "age": "5m"}
        try:
            r = self.http.get(
                url,
                params=params,
                headers={"accept": "*/*"},
                proxies=self.pool.requests_proxies(),
                timeout=self.config.request_timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            self.fail_over("Transaction scan failed", e)
            return []
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            items = []
        hashes = [it["hash"] for it in items if isinstance(it, dict) and isinstance(it.get("hash"), str) and it["hash"]]
        self.log.log("📊", f"Found {len(hashes)} recent transactions", "title")
        return hashes


class TransactionPromptProvider:
    """Rewrites one target's question pool from the latest transactions."""

    def __init__(self, scanner: TransactionScanner, target_key: str, template: str = TX_PROMPT_TEMPLATE):
        self.scanner = scanner
        self.target_key = target_key
        self.template = template

    def refresh(self, catalog: TargetCatalog) -> None:
        if self.target_key not in catalog:
            return
        hashes = self.scanner.scan()
        catalog.replace_questions(self.target_key, [self.template.format(tx_hash=h) for h in hashes])
