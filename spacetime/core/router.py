# spacetime/core/router.py
# -----------------------------------------------------------------------------
# Ephemeris strategy: provider registry, per-body priorities and routing
#
# Selection walks the body's priority list, then every registered provider in
# registration order; the first provider that supports the body and covers
# the Julian date wins. Nothing is cached across queries.
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import ErrorCode, Result, fail, ok
from .provider import EphemerisProvider
from .types import StateVector, TimeRange
from ..utils.metrics import SpaceTimeMetrics

log = logging.getLogger(__name__)


class EphemerisStrategy:
    def __init__(self) -> None:
        self._providers: Dict[str, EphemerisProvider] = {}
        self._ranges: Dict[str, TimeRange] = {}
        self._priorities: Dict[str, Tuple[str, ...]] = {}

    # ───────────────────────── registry ─────────────────────────
    def register_provider(self, provider: EphemerisProvider) -> Result:
        checked = self._check_provider(provider)
        if not checked.success:
            log.warning("provider registration rejected: %s", checked.error.message)
            return checked
        pid = provider.get_provider_id()
        self._providers[pid] = provider
        self._ranges[pid] = checked.data
        log.info("ephemeris provider registered: %s (%d bodies)", pid, len(provider.get_supported_bodies()))
        return ok()

    def _check_provider(self, provider: EphemerisProvider) -> Result:
        """Validate a provider for registration; on success the data is its normalised TimeRange."""
        try:
            pid = provider.get_provider_id()
            bodies = provider.get_supported_bodies()
            rng = provider.get_time_range()
        except Exception as e:
            return fail(ErrorCode.INVALID_CONFIGURATION, f"provider self-check raised: {e}")

        if not isinstance(pid, str) or not pid or pid != pid.strip():
            return fail(ErrorCode.INVALID_CONFIGURATION, f"invalid provider id: {pid!r}")
        if pid in self._providers:
            return fail(ErrorCode.INVALID_CONFIGURATION, f"provider already registered: {pid}", provider_id=pid)
        if not isinstance(bodies, (set, frozenset)) or not bodies:
            return fail(ErrorCode.INVALID_CONFIGURATION, "supported bodies must be a non-empty set", provider_id=pid)
        try:
            start, end = float(rng[0]), float(rng[1])
        except (TypeError, ValueError, IndexError):
            return fail(ErrorCode.INVALID_CONFIGURATION, f"invalid time range: {rng!r}", provider_id=pid)
        if not (math.isfinite(start) and math.isfinite(end)) or start >= end:
            return fail(ErrorCode.INVALID_CONFIGURATION, f"invalid time range: [{start}, {end}]", provider_id=pid)
        return ok(TimeRange(start, end))

    def get_registered_providers(self) -> List[str]:
        return list(self._providers)

    def get_provider(self, provider_id: str) -> Optional[EphemerisProvider]:
        return self._providers.get(provider_id)

    # ───────────────────────── priorities ─────────────────────────
    def set_provider_priority(self, body_id: str, provider_ids: Sequence[str]) -> Result:
        if not isinstance(body_id, str) or not body_id:
            return fail(ErrorCode.INVALID_CONFIGURATION, "priority needs a non-empty body id")
        ids = list(provider_ids)
        if not ids:
            return fail(ErrorCode.INVALID_CONFIGURATION, "priority list is empty", body_id=body_id)
        if len(set(ids)) != len(ids):
            return fail(ErrorCode.INVALID_CONFIGURATION, "priority list has duplicates", body_id=body_id)
        missing = [pid for pid in ids if pid not in self._providers]
        if missing:
            return fail(ErrorCode.PROVIDER_UNAVAILABLE, f"unregistered providers: {', '.join(missing)}",
                        body_id=body_id, provider_ids=missing)
        self._priorities[body_id] = tuple(ids)
        return ok()

    def get_priorities(self, body_id: str) -> Tuple[str, ...]:
        return self._priorities.get(body_id, ())

    # ───────────────────────── selection ─────────────────────────
    def select_provider(self, body_id: str, julian_date: float) -> Result:
        if not isinstance(body_id, str) or not body_id:
            return fail(ErrorCode.INVALID_BODY_ID, "body id must be a non-empty string")
        if not isinstance(julian_date, (int, float)) or not math.isfinite(julian_date):
            return fail(ErrorCode.INVALID_JULIAN_DATE, f"Julian date must be finite: {julian_date!r}")
        if not self._providers:
            return fail(ErrorCode.PROVIDER_UNAVAILABLE, "no ephemeris providers registered", body_id=body_id)

        for pid in self._priorities.get(body_id, ()):
            if self._covers(pid, body_id, julian_date):
                return ok(self._providers[pid])
        for pid, provider in self._providers.items():
            if self._covers(pid, body_id, julian_date):
                return ok(provider)
        return fail(ErrorCode.PROVIDER_UNAVAILABLE,
                    f"no provider covers '{body_id}' at JD {julian_date}",
                    body_id=body_id, julian_date=julian_date)

    def _covers(self, provider_id: str, body_id: str, julian_date: float) -> bool:
        provider = self._providers[provider_id]
        return body_id in provider.get_supported_bodies() and self._ranges[provider_id].contains(julian_date)

    def clear(self) -> None:
        self._providers.clear()
        self._ranges.clear()
        self._priorities.clear()


class EphemerisRouter:
    """Routes state queries through an EphemerisStrategy."""

    def __init__(self, strategy: Optional[EphemerisStrategy] = None,
                 metrics: Optional[SpaceTimeMetrics] = None) -> None:
        self.strategy = strategy if strategy is not None else EphemerisStrategy()
        self._metrics = metrics

    def register_provider(self, provider: EphemerisProvider) -> Result:
        return self.strategy.register_provider(provider)

    def set_provider_priority(self, body_id: str, provider_ids: Sequence[str]) -> Result:
        return self.strategy.set_provider_priority(body_id, provider_ids)

    def get_state(self, body_id: str, julian_date: float) -> Result:
        selected = self.strategy.select_provider(body_id, julian_date)
        if not selected.success:
            return self._count(None, selected)
        provider: EphemerisProvider = selected.data
        try:
            res = provider.get_state(body_id, julian_date)
        except Exception as e:
            log.error("provider %s raised for %s: %s", provider.get_provider_id(), body_id, e)
            res = fail(ErrorCode.CALCULATION_FAILED, f"provider raised: {e}",
                       provider_id=provider.get_provider_id(), body_id=body_id)
        return self._count(provider, res)

    def get_states(self, body_id: str, julian_dates: Sequence[float]) -> Result:
        if not julian_dates:
            return fail(ErrorCode.INVALID_JULIAN_DATE, "Julian date list is empty", body_id=body_id)
        selected = self.strategy.select_provider(body_id, julian_dates[0])
        if not selected.success:
            return self._count(None, selected)
        provider: EphemerisProvider = selected.data
        pid = provider.get_provider_id()
        try:
            res = provider.get_states(body_id, julian_dates)
        except NotImplementedError:
            log.debug("provider %s has no bulk query; falling back to sequential", pid)
            res = self._sequential(provider, body_id, julian_dates)
        except Exception as e:
            log.error("provider %s raised for %s (bulk): %s", pid, body_id, e)
            res = fail(ErrorCode.CALCULATION_FAILED, f"provider raised: {e}", provider_id=pid, body_id=body_id)
        return self._count(provider, res)

    @staticmethod
    def _sequential(provider: EphemerisProvider, body_id: str, julian_dates: Sequence[float]) -> Result:
        out: List[StateVector] = []
        for jd in julian_dates:
            try:
                res = provider.get_state(body_id, jd)
            except Exception as e:
                return fail(ErrorCode.CALCULATION_FAILED, f"provider raised: {e}",
                            provider_id=provider.get_provider_id(), body_id=body_id)
            if not res.success:
                return res
            out.append(res.data)
        return ok(out)

    def _count(self, provider: Optional[EphemerisProvider], res: Result) -> Result:
        if self._metrics is not None:
            pid = provider.get_provider_id() if provider is not None else "none"
            self._metrics.state_queries.labels(provider=pid, outcome="ok" if res.success else "error").inc()
            if not res.success:
                self._metrics.query_failures.labels(code=res.error.code.value).inc()
        return res


__all__ = ["EphemerisStrategy", "EphemerisRouter"]
