import time
from typing import Optional

from clubhouse import socketio
from .lifecycle import LifecycleState, current_lifecycle


CLUB_ROOM = 'club'

_ticker_started = False


def broadcast_lifecycle(state: LifecycleState) -> None:
    socketio.emit('lifecycle_update', state.to_dict(), to=CLUB_ROOM, namespace='/ws')


def tick(app, last: Optional[LifecycleState] = None) -> LifecycleState:
    """Re-evaluate the lifecycle once; push it if it differs from ``last``."""
    with app.app_context():
        state = current_lifecycle()
    if state != last:
        app.logger.info(
            f"[lifecycle] phase={state.phase.value} game={state.game.date_key if state.game else '-'}"
        )
        broadcast_lifecycle(state)
    return state


def start_lifecycle_ticker(app) -> None:
    """Start the background loop that re-evaluates the lifecycle every LIFECYCLE_POLL_SEC.

    - No-ops in TESTING mode unless ENABLE_TICKER_IN_TESTS is set
    - Only one loop per process
    - Evaluation errors are logged and the loop keeps going
    """
    global _ticker_started
    if app.config.get('TESTING') and not app.config.get('ENABLE_TICKER_IN_TESTS'):
        return
    if _ticker_started:
        app.logger.info('[ticker-skip] lifecycle ticker already running')
        return
    _ticker_started = True

    interval = max(1, int(app.config.get('LIFECYCLE_POLL_SEC', 60)))
    app.logger.info(f"[ticker-start] interval={interval}s")

    def _worker():
        last = None
        while True:
            try:
                last = tick(app, last)
            except Exception as exc:
                app.logger.exception(f"[ticker-error] {exc}")
            time.sleep(interval)

    socketio.start_background_task(_worker)
