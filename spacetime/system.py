# spacetime/system.py
# -----------------------------------------------------------------------------
# Host bootstrap: builds one fully wired foundation instance from config.
#
# The physical layer keeps the SpaceTimeSystem (administrative access);
# presentation code is handed only `system.view`.
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Union

from .core.boundary import PresentationView, ViolationReporter
from .core.errors import Result, SpaceTimeException
from .core.jpl import JPLProvider
from .core.lunar import SimplifiedProvider
from .core.provider import EphemerisProvider
from .core.reference_frame import ReferenceFrameManager
from .core.settings import SpaceTimeSettings, settings_from_config
from .core.space_time_core import SpaceTimeCore
from .core.time_authority import TimeAuthority
from .core.validator import ArchitecturalValidator, ValidationReport
from .core.vsop87 import VSOP87Provider
from .utils.config import load_config
from .utils.log import configure_logging
from .utils.metrics import SpaceTimeMetrics

log = logging.getLogger(__name__)


@dataclass
class SpaceTimeSystem:
    settings: SpaceTimeSettings
    metrics: SpaceTimeMetrics
    reporter: ViolationReporter
    time_authority: TimeAuthority
    frames: ReferenceFrameManager
    core: SpaceTimeCore
    view: PresentationView
    validator: ArchitecturalValidator

    def validate(self) -> ValidationReport:
        return self.validator.validate_system(self.core, self.time_authority, self.frames)

    def shutdown(self) -> None:
        self.core.dispose()
        self.time_authority.dispose()


def _raise_on_failure(res: Result, what: str) -> None:
    if not res.success:
        raise SpaceTimeException(res.error.code, f"{what}: {res.error.message}", **(res.error.details or {}))


def build_providers(settings: SpaceTimeSettings) -> List[EphemerisProvider]:
    frame_id = settings.primary_frame.frame_id
    out: List[EphemerisProvider] = []
    for pid in settings.enabled_providers:
        if pid == "vsop87":
            out.append(VSOP87Provider(reference_frame_id=frame_id))
        elif pid == "simplified":
            out.append(SimplifiedProvider(reference_frame_id=frame_id))
        elif pid == "jpl":
            if not settings.jpl_kernel_path:
                log.warning("JPL provider enabled without a kernel_path; skipped")
                continue
            try:
                out.append(JPLProvider(kernel_path=settings.jpl_kernel_path, reference_frame_id=frame_id))
            except SpaceTimeException as e:
                log.warning("JPL provider skipped: %s", e)
    return out


def build_space_time_system(
    cfg: Union[Mapping[str, Any], SpaceTimeSettings, None] = None,
    *,
    initial_julian_date: Optional[float] = None,
    providers: Optional[Sequence[EphemerisProvider]] = None,
) -> SpaceTimeSystem:
    if isinstance(cfg, SpaceTimeSettings):
        settings = cfg
    else:
        settings = settings_from_config(cfg if cfg is not None else load_config())
    if settings.configure_logging:
        configure_logging(settings.log_level)

    metrics = SpaceTimeMetrics()
    reporter = ViolationReporter(settings.violation_budget, settings.violation_capacity, metrics=metrics)

    jd = initial_julian_date if initial_julian_date is not None else settings.initial_julian_date
    time_authority = TimeAuthority(jd, constraints=settings.constraints, metrics=metrics)

    frames = ReferenceFrameManager(settings.primary_frame)
    for frame in settings.derived_frames:
        _raise_on_failure(frames.add_derived_frame(frame), f"derived frame {frame.frame_id}")

    core = SpaceTimeCore(primary_frame_id=settings.primary_frame.frame_id, metrics=metrics)
    _raise_on_failure(core.initialize(time_authority, frames.get_authoritative_frame()), "initialize")

    for provider in (providers if providers is not None else build_providers(settings)):
        _raise_on_failure(core.register_ephemeris_provider(provider), f"register {provider.get_provider_id()}")

    registered = {p.get_provider_id() for p in core.get_providers()}
    for body_id, ids in settings.priorities.items():
        usable = [pid for pid in ids if pid in registered]
        if usable:
            _raise_on_failure(core.set_provider_priority(body_id, usable), f"priority for {body_id}")

    validator = ArchitecturalValidator(
        primary_frame_id=settings.primary_frame.frame_id,
        constraints=settings.constraints,
        log_capacity=settings.validator_log_capacity,
    )
    log.info("space-time system ready: providers=%s", ", ".join(sorted(registered)) or "none")
    return SpaceTimeSystem(
        settings=settings,
        metrics=metrics,
        reporter=reporter,
        time_authority=time_authority,
        frames=frames,
        core=core,
        view=core.presentation_view(reporter),
        validator=validator,
    )


__all__ = ["SpaceTimeSystem", "build_providers", "build_space_time_system"]
