# matchsim/remote.py
"""
HTTP oracle client.
POST {url} with the match request JSON -> {homeScore, awayScore, events, playerRatings, summary}.
Candidate endpoints live beside it: POST {base}/transfers, POST {base}/academy.
"""
from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional

import httpx

from career.config import MATCH_ORACLE_TIMEOUT, MATCH_ORACLE_URL
from career.errors import OracleFailure
from career.types import MatchResult

from .oracle import MatchRequest, gate_revenue, parse_result

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}


def _post_json(client: httpx.Client, url: str, payload: Dict[str, Any], context: str) -> Any:
    """POST and decode; every transport or decode problem becomes OracleFailure."""
    try:
        r = client.post(url, json=payload, headers=JSON_HEADERS)
    except httpx.HTTPError as e:
        logger.warning("Oracle %s request failed: %s", context, e)
        raise OracleFailure(f"{context}: could not reach the oracle ({e})") from e
    if r.status_code >= 400:
        logger.warning("Oracle %s returned status %d", context, r.status_code)
        raise OracleFailure(f"{context}: oracle returned status {r.status_code}")
    try:
        return r.json()
    except ValueError as e:
        preview = (r.text or "")[:150].replace("\n", " ")
        raise OracleFailure(f"{context}: response is not JSON. First chars: {preview!r}") from e


class RemoteMatchOracle:
    """Match oracle behind an HTTP endpoint. Revenue is always computed locally."""

    def __init__(
        self,
        url: str = MATCH_ORACLE_URL,
        timeout: float = MATCH_ORACLE_TIMEOUT,
        client: Optional[httpx.Client] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.url = url
        self.client = client or httpx.Client(timeout=timeout)
        self.rng = rng or random.Random()

    def simulate(self, request: MatchRequest) -> MatchResult:
        data = _post_json(self.client, self.url, request.to_payload(), "simulate")
        result = parse_result(data, request, revenue=gate_revenue(request.club.stadium, self.rng))
        logger.info("Oracle result: %s %d-%d %s", result.home_team, result.home_score,
                    result.away_score, result.away_team)
        return result

    def close(self) -> None:
        self.client.close()


class RemoteCandidateGenerator:
    """Transfer-market and academy candidates from the same service."""

    def __init__(
        self,
        base_url: str = MATCH_ORACLE_URL.rsplit("/", 1)[0],
        timeout: float = MATCH_ORACLE_TIMEOUT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)

    def transfer_market(self, average_rating: float, count: int = 4) -> List[Dict[str, Any]]:
        data = _post_json(
            self.client, f"{self.base_url}/transfers",
            {"averageRating": round(float(average_rating), 1), "count": int(count)}, "transfers",
        )
        if not isinstance(data, list) or not all(isinstance(x, dict) for x in data):
            raise OracleFailure("transfers: expected a list of player objects")
        return data

    def academy_prospect(self, academy_level: int) -> Dict[str, Any]:
        data = _post_json(self.client, f"{self.base_url}/academy", {"level": int(academy_level)}, "academy")
        if not isinstance(data, dict):
            raise OracleFailure("academy: expected a player object")
        return data
