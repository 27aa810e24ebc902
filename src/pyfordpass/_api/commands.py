"""Remote command endpoints.

Endpoints:
  - PUT/DELETE /api/vehicles/v2/{vin}/doors/lock     (lock / unlock)
  - PUT/DELETE /api/vehicles/v2/{vin}/engine/start   (start / stop)
  - GET {command path}/{commandId}                   (acknowledgement poll)

A trigger answers with a ``commandId``.  The vehicle has acknowledged
the command once the poll reports status ``200``; ``552`` means the
command is still pending and anything else is a failure.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError

from pyfordpass._api._common import authorized_request
from pyfordpass._transport import Transport
from pyfordpass.config import FordPassConfig
from pyfordpass.exceptions import FordPassApiError, FordPassCommandError, FordPassCommandTimeoutError
from pyfordpass.models.command import Command, CommandResult, CommandTicket
from pyfordpass.session import Session

_logger = logging.getLogger(__name__)

#: (HTTP method, path suffix) per command.
_COMMAND_ROUTES: dict[Command, tuple[str, str]] = {
    Command.LOCK: ("PUT", "doors/lock"),
    Command.UNLOCK: ("DELETE", "doors/lock"),
    Command.START: ("PUT", "engine/start"),
    Command.STOP: ("DELETE", "engine/start"),
}


def command_path(vin: str, command: Command) -> str:
    """Path of the trigger endpoint for *command*."""
    _method, suffix = _COMMAND_ROUTES[command]
    return f"/api/vehicles/v2/{vin}/{suffix}"


def command_method(command: Command) -> str:
    method, _suffix = _COMMAND_ROUTES[command]
    return method


async def trigger_command(
    config: FordPassConfig,
    session: Session,
    transport: Transport,
    vin: str,
    command: Command,
) -> CommandTicket:
    """Send the trigger request and return its ticket."""
    path = command_path(vin, command)
    response = await authorized_request(command_method(command), path, config, session, transport)
    try:
        ticket = CommandTicket.model_validate(response)
    except ValidationError as exc:
        raise FordPassApiError(f"{path} returned an invalid command ticket: {exc}", endpoint=path) from exc
    if not ticket.command_id:
        raise FordPassCommandError(
            f"{path} did not return a commandId (status={ticket.status})",
            status=ticket.status,
            endpoint=path,
        )
    return ticket


async def fetch_command_result(
    config: FordPassConfig,
    session: Session,
    transport: Transport,
    vin: str,
    command: Command,
    command_id: str,
) -> CommandResult:
    """Poll the acknowledgement endpoint once."""
    path = f"{command_path(vin, command)}/{command_id}"
    response = await authorized_request("GET", path, config, session, transport)
    return CommandResult.model_validate({"commandId": command_id, **response})


async def poll_command(
    config: FordPassConfig,
    session: Session,
    transport: Transport,
    vin: str,
    command: Command,
    *,
    poll_attempts: int | None = None,
    poll_interval: float | None = None,
) -> CommandResult:
    """Send a remote command and poll until the vehicle acknowledges it.

    Parameters
    ----------
    poll_attempts : int or None
        Maximum number of acknowledgement polls.  Defaults to
        ``config.command_poll_attempts``.
    poll_interval : float or None
        Seconds to wait before each poll.  Defaults to
        ``config.command_poll_interval``.

    Returns
    -------
    CommandResult
        The successful acknowledgement.

    Raises
    ------
    FordPassCommandError
        When the vehicle reports a failure.
    FordPassCommandTimeoutError
        When the command is still pending after every poll.
    """
    attempts = poll_attempts if poll_attempts is not None else config.command_poll_attempts
    interval = poll_interval if poll_interval is not None else config.command_poll_interval

    ticket = await trigger_command(config, session, transport, vin, command)
    _logger.debug("Command %s for %s accepted as %s", command.value, vin, ticket.command_id)

    for attempt in range(1, max(attempts, 1) + 1):
        await asyncio.sleep(interval)
        result = await fetch_command_result(config, session, transport, vin, command, ticket.command_id)
        if result.success:
            _logger.debug("Command %s for %s acknowledged after %d poll(s)", command.value, vin, attempt)
            return result
        if not result.is_pending:
            raise FordPassCommandError(
                f"Command {command.value} failed with status {result.status}",
                status=result.status,
                endpoint=command_path(vin, command),
            )

    raise FordPassCommandTimeoutError(
        f"Command {command.value} still pending after {attempts} poll(s)",
        endpoint=command_path(vin, command),
    )
