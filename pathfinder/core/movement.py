"""Lifecycle of the device's movement plan.

The device exposes a single, unnamed movement slot at ``/v1/movement``. It
never echoes the installed plan back, so the reconciler treats its own request
as the source of truth and only uses responses to confirm the call was
accepted (create) or that the plan still exists (read).
"""

from __future__ import annotations

import logging
import threading

from pathfinder.core import codec
from pathfinder.core.diagnostics import OPERATIONAL_ERRORS, Result, translate
from pathfinder.core.model import MovementPlan
from pathfinder.core.probe import expect_success
from pathfinder.transports.base import Transport

LOGGER = logging.getLogger(__name__)
MOVEMENT_PATH = "/v1/movement"


class MovementPlanReconciler:
    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    def create(self, desired: MovementPlan, *, cancel: threading.Event | None = None) -> Result[MovementPlan]:
        try:
            codec.validate_plan(desired)
            body = codec.encode_movement_request(codec.plan_to_request(desired))
            LOGGER.debug("Sending POST request to: %s with body: %s", MOVEMENT_PATH, body.decode("utf-8"))
            response = self._transport.send("POST", MOVEMENT_PATH, body, cancel=cancel)
            if response.not_found:
                # The plan is not tracked, but no failure is reported either.
                LOGGER.warning("POST %s returned 404; plan '%s' is not tracked", MOVEMENT_PATH, desired.name)
                return Result(state=None)
            expect_success(response, method="POST", path=MOVEMENT_PATH)
            accepted = codec.decode_movement_response(response.body)
        except OPERATIONAL_ERRORS as exc:
            return Result(state=None, diagnostics=translate(exc, operation="movement create"))

        LOGGER.info("Movement plan '%s' accepted (moving=%s)", desired.name, accepted.moving)
        return Result(state=desired)

    def read(
        self,
        tracked: MovementPlan,
        *,
        cancel: threading.Event | None = None,
    ) -> Result[MovementPlan]:
        try:
            response = self._transport.send("GET", MOVEMENT_PATH, cancel=cancel)
            if response.not_found:
                LOGGER.info("Movement plan '%s' no longer exists on the device", tracked.name)
                return Result(state=None)
            expect_success(response, method="GET", path=MOVEMENT_PATH)
            codec.decode_movement_response(response.body)
        except OPERATIONAL_ERRORS as exc:
            return Result(state=tracked, diagnostics=translate(exc, operation="movement read"))
        return Result(state=tracked)

    def update(self, tracked: MovementPlan | None, desired: MovementPlan) -> Result[MovementPlan]:
        """Replace the tracked snapshot with ``desired``.

        The device has no update endpoint and is not contacted: a changed step
        list or persist flag only reaches the device on the next create.
        """
        try:
            codec.validate_plan(desired)
        except OPERATIONAL_ERRORS as exc:
            return Result(state=tracked, diagnostics=translate(exc, operation="movement update"))
        LOGGER.warning(
            "Movement plan '%s' updated in tracked state only; the device keeps its current plan",
            desired.name,
        )
        return Result(state=desired)

    def delete(
        self,
        tracked: MovementPlan,
        *,
        cancel: threading.Event | None = None,
    ) -> Result[MovementPlan]:
        try:
            response = self._transport.send("DELETE", MOVEMENT_PATH, cancel=cancel)
            if response.not_found:
                LOGGER.info("Movement plan '%s' was already absent", tracked.name)
                return Result(state=None)
            expect_success(response, method="DELETE", path=MOVEMENT_PATH)
            codec.decode_movement_response(response.body)
        except OPERATIONAL_ERRORS as exc:
            return Result(state=tracked, diagnostics=translate(exc, operation="movement delete"))
        LOGGER.info("Movement plan '%s' deleted", tracked.name)
        return Result(state=None)
