"""Vehicle status endpoint.

Endpoint:
  - GET /api/vehicles/v4/{vin}/status
"""

from __future__ import annotations

from pydantic import ValidationError

from pyfordpass._api._common import authorized_request
from pyfordpass._transport import Transport
from pyfordpass.config import FordPassConfig
from pyfordpass.exceptions import FordPassApiError
from pyfordpass.models.status import VehicleStatus
from pyfordpass.session import Session


def status_path(vin: str) -> str:
    return f"/api/vehicles/v4/{vin}/status"


async def fetch_vehicle_status(
    config: FordPassConfig,
    session: Session,
    transport: Transport,
    vin: str,
) -> VehicleStatus:
    """Fetch and validate the ``vehiclestatus`` object for *vin*."""
    path = status_path(vin)
    response = await authorized_request("GET", path, config, session, transport)
    payload = response.get("vehiclestatus")
    if not isinstance(payload, dict):
        raise FordPassApiError(
            f"{path} returned no vehiclestatus (status={response.get('status')})",
            status=response.get("status") if isinstance(response.get("status"), int) else None,
            endpoint=path,
        )
    try:
        return VehicleStatus.model_validate(payload)
    except ValidationError as exc:
        raise FordPassApiError(f"{path} returned an invalid vehiclestatus: {exc}", endpoint=path) from exc
