from __future__ import annotations

from typing import TYPE_CHECKING

from statemachine import State, StateMachine

from cauldron.core.models import ParserPhase

if TYPE_CHECKING:
    from cauldron.core.parser import TrackedGame


class SnapshotFSM(StateMachine):
    """FSM wrapper around a TrackedGame.

    - uninitialized -> tracking happens once, when the first snapshot seeds the baseline.
    - accept/discard/reject are self-loops on tracking; the parser mutates counters, the FSM only guards.
    """

    uninitialized = State(
        ParserPhase.uninitialized.value,
        value=ParserPhase.uninitialized.value,
        initial=True,
    )
    tracking = State(ParserPhase.tracking.value, value=ParserPhase.tracking.value)

    seed = uninitialized.to(tracking)
    accept = tracking.to.itself()
    discard = tracking.to.itself()
    reject = tracking.to.itself() | uninitialized.to.itself()

    def __init__(self, game: TrackedGame):
        self.game = game
        super().__init__(start_value=game.phase.value)

    def sync_phase_to_model(self) -> None:
        self.game.phase = ParserPhase(str(self.current_state.value))
