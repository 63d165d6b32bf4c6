"""Four-stage SET/GET feature report handshake."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

from hidclock.core.codec import BUFFER_LENGTH, HANDSHAKE_STAGES, REPORT_ID, REPORT_LENGTH, encode_stage
from hidclock.core.errors import TransferError
from hidclock.core.model import CalendarFields, HandshakeStage, SequencerState, StageResult
from hidclock.transports.base import HidHandle

DEFAULT_INTER_STAGE_DELAY_S = 0.05
LOGGER = logging.getLogger(__name__)

_STAGE_STATES = (
    SequencerState.STAGE_1,
    SequencerState.STAGE_2,
    SequencerState.STAGE_3,
    SequencerState.STAGE_4,
)


class HandshakeSequencer:
    """Drive the handshake stages in order over one open HID handle.

    Each stage is a SET feature report followed by a GET on the same report
    ID. The GET response is not validated; reading it clears the device's
    reply channel so the next SET is accepted. The first failing transfer
    aborts the run and nothing is retried.
    """

    def __init__(
        self,
        handle: HidHandle,
        *,
        stages: Sequence[HandshakeStage] = HANDSHAKE_STAGES,
        delay_s: float = DEFAULT_INTER_STAGE_DELAY_S,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if len(stages) != len(_STAGE_STATES):
            raise ValueError(f"Expected {len(_STAGE_STATES)} handshake stages, got {len(stages)}")
        self._handle = handle
        self._stages = tuple(stages)
        self._delay_s = delay_s
        self._sleep = sleep
        self.state = SequencerState.STAGE_1

    def run(self, fields: CalendarFields) -> tuple[StageResult, ...]:
        if self.state is not SequencerState.STAGE_1:
            raise RuntimeError(f"Handshake already ran (state={self.state.value})")

        results: list[StageResult] = []
        for stage, state in zip(self._stages, _STAGE_STATES):
            self.state = state
            try:
                results.append(self._run_stage(stage, fields))
            except TransferError as exc:
                self.state = SequencerState.FAILED
                LOGGER.error("%s", exc)
                raise
            self._sleep(self._delay_s)

        self.state = SequencerState.DONE
        LOGGER.info("Handshake completed (%d stages)", len(results))
        return tuple(results)

    def _run_stage(self, stage: HandshakeStage, fields: CalendarFields) -> StageResult:
        payload = encode_stage(stage, fields)
        LOGGER.debug("Stage %d (%s) SET %s", stage.index, stage.name, payload.hex())

        try:
            written = self._handle.send_feature_report(payload)
        except (OSError, ValueError) as exc:
            raise TransferError(stage.index, f"SET feature report failed: {exc}", stage_name=stage.name) from exc
        if written is not None and written < 0:
            raise TransferError(stage.index, "SET feature report failed", stage_name=stage.name)
        # Some backends report the length without the report ID byte.
        if written is not None and written < REPORT_LENGTH:
            raise TransferError(
                stage.index,
                f"short write ({written} of {len(payload)} bytes)",
                stage_name=stage.name,
            )

        response: bytes | None = None
        if stage.expects_response:
            try:
                response = self._handle.get_feature_report(REPORT_ID, BUFFER_LENGTH)
            except (OSError, ValueError) as exc:
                raise TransferError(stage.index, f"GET feature report failed: {exc}", stage_name=stage.name) from exc
            LOGGER.debug("Stage %d (%s) GET %s", stage.index, stage.name, response.hex())

        return StageResult(
            stage=stage,
            payload_hex=payload.hex(),
            response_hex=response.hex() if response else None,
        )
