# flash_arb/whitelist.py
"""
Router and token whitelists.

Mutations are checked for ownership only. Whitelisting a malicious
router or token lets it drain the receiver during a cycle; choosing
what to whitelist is the owner's operational responsibility.
"""

import logging
from typing import Dict, Iterable

from flash_arb.access import AccessGate
from flash_arb.events import EventLog, RouterWhitelisted, TokenWhitelisted
from flash_arb.host import to_address

logger = logging.getLogger(__name__)


class WhitelistRegistry:
    def __init__(self, gate: AccessGate, events: EventLog):
        self.gate = gate
        self.events = events
        self.routers: Dict[str, bool] = {}
        self.tokens: Dict[str, bool] = {}

    def is_router_allowed(self, router: str) -> bool:
        return self.routers.get(to_address(router), False)

    def is_token_allowed(self, token: str) -> bool:
        return self.tokens.get(to_address(token), False)

    def set_router(self, caller: str, router: str, allowed: bool) -> None:
        self.gate.only_owner(caller)
        router = to_address(router)
        self.routers[router] = bool(allowed)
        self.events.emit(RouterWhitelisted(router, bool(allowed)))
        logger.info(f"Router {router} allowed={allowed}")

    def set_token(self, caller: str, token: str, allowed: bool) -> None:
        self.gate.only_owner(caller)
        token = to_address(token)
        self.tokens[token] = bool(allowed)
        self.events.emit(TokenWhitelisted(token, bool(allowed)))
        logger.info(f"Token {token} allowed={allowed}")

    def set_tokens(self, caller: str, tokens: Iterable[str], allowed: bool) -> None:
        for token in tokens:
            self.set_token(caller, token, allowed)

    def snapshot(self) -> tuple:
        return dict(self.routers), dict(self.tokens)

    def restore(self, snap: tuple) -> None:
        self.routers, self.tokens = dict(snap[0]), dict(snap[1])
