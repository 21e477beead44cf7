import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from core.access import CallerRole
from core.config import PERIMETER_SCOPE
from core.exceptions import Forbidden, InvalidInput
from models.perimeter import PerimeterConfig
from utils.datetime_helpers import utc_now
from utils.geofence import Coordinate, distance_km

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerimeterCheck:
    enforced: bool
    within: bool
    distance_km: Optional[float] = None
    radius_km: Optional[float] = None


def is_within_perimeter(location: Coordinate, config: Optional[PerimeterConfig]) -> bool:
    # No perimeter configured means no enforcement
    if config is None:
        return True
    return distance_km(location, config.center) <= config.radius_km


def check_location(location: Coordinate, config: Optional[PerimeterConfig]) -> PerimeterCheck:
    if config is None:
        return PerimeterCheck(enforced=False, within=True)
    distance = distance_km(location, config.center)
    return PerimeterCheck(
        enforced=True,
        within=distance <= config.radius_km,
        distance_km=distance,
        radius_km=config.radius_km,
    )


def validate_perimeter(center_lat: float, center_long: float, radius_km: float) -> None:
    if not -90 <= center_lat <= 90:
        raise InvalidInput("center_lat must be between -90 and 90.")
    if not -180 <= center_long <= 180:
        raise InvalidInput("center_long must be between -180 and 180.")
    if not radius_km > 0:
        raise InvalidInput("radius_km must be greater than 0.")


def _require_manager(caller: dict) -> None:
    if caller.get("role") != CallerRole.MANAGER:
        raise Forbidden()


class PerimeterService:

    @staticmethod
    def latest(session: Session, scope: str = PERIMETER_SCOPE) -> Optional[PerimeterConfig]:
        return session.exec(
            select(PerimeterConfig).where(PerimeterConfig.scope == scope)
        ).first()

    @staticmethod
    def set_perimeter(
        session: Session,
        caller: dict,
        center_lat: Optional[float],
        center_long: Optional[float],
        radius_km: Optional[float],
        scope: str = PERIMETER_SCOPE,
    ) -> Optional[PerimeterConfig]:
        """
        Replace the perimeter, or clear it.

        A request missing any of the three values is a clear request, not a
        validation error. Returns the stored row, or None after a clear.
        """
        _require_manager(caller)

        if center_lat is None or center_long is None or radius_km is None:
            PerimeterService.clear_perimeter(session, caller, scope=scope)
            return None

        validate_perimeter(center_lat, center_long, radius_km)

        existing = PerimeterService.latest(session, scope)
        if existing is None:
            config = PerimeterConfig(
                scope=scope,
                center_lat=center_lat,
                center_long=center_long,
                radius_km=radius_km,
            )
            session.add(config)
            try:
                session.commit()
            except IntegrityError:
                # Another manager inserted first; overwrite their row instead
                session.rollback()
                existing = PerimeterService.latest(session, scope)
                if existing is None:
                    raise
                return PerimeterService._update(session, existing, center_lat, center_long, radius_km)
            except SQLAlchemyError:
                session.rollback()
                raise
            session.refresh(config)
            logger.info(f"Manager {caller.get('email')} created perimeter {config.id}")
            return config

        return PerimeterService._update(session, existing, center_lat, center_long, radius_km)

    @staticmethod
    def _update(
        session: Session,
        config: PerimeterConfig,
        center_lat: float,
        center_long: float,
        radius_km: float,
    ) -> PerimeterConfig:
        config.center_lat = center_lat
        config.center_long = center_long
        config.radius_km = radius_km
        config.updated_at = utc_now()
        session.add(config)
        try:
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        session.refresh(config)
        logger.info(f"Perimeter {config.id} updated to ({center_lat},{center_long}) r={radius_km}km")
        return config

    @staticmethod
    def clear_perimeter(session: Session, caller: dict, scope: str = PERIMETER_SCOPE) -> None:
        _require_manager(caller)

        existing = PerimeterService.latest(session, scope)
        if existing is None:
            return

        perimeter_id = existing.id
        session.delete(existing)
        try:
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        logger.info(f"Manager {caller.get('email')} cleared perimeter {perimeter_id}")
