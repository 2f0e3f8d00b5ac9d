"""
Fixed-interval poll loop waiting for a HIT's first assignment.

The deadline is start + max_wait on a monotonic clock. The deadline is checked
after every poll, before sleeping, and each sleep is clamped to the remaining
budget, so the loop never sleeps past the deadline. One final poll happens at
the deadline after the last clamped sleep. At least one poll is always made.
"""
import time
from typing import Callable, Optional
from .config import config
from .errors import TransientPollError
from .logging import logger
from .models import POLL_STATUSES, PollSession
from .mturk import list_assignments


def wait_for_assignment(
    hit_id: str,
    max_wait_seconds: float,
    poll_interval: Optional[float] = None,
    client=None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep
) -> PollSession:
    """
    Poll for a submitted or approved assignment until one appears or time runs out.

    Args:
        hit_id: HIT to watch
        max_wait_seconds: Caller's wait budget; <= 0 still polls once
        poll_interval: Seconds between polls, defaults to config.POLL_INTERVAL_SECONDS
        client: Optional MTurk client
        clock: Monotonic clock, injectable for tests
        sleep: Sleep function, injectable for tests

    Returns:
        The finished PollSession; session.assignment is None on timeout
    """
    if poll_interval is None:
        poll_interval = config.POLL_INTERVAL_SECONDS

    start = clock()
    session = PollSession(
        hit_id=hit_id,
        start=start,
        deadline=start + max_wait_seconds,
        interval=poll_interval,
    )

    while True:
        session.attempts += 1
        try:
            assignments = list_assignments(hit_id, POLL_STATUSES, client=client)
        except TransientPollError as e:
            logger.warning(f"Poll {session.attempts} for HIT {hit_id} failed: {e}")
        else:
            if assignments:
                session.assignment = assignments[0]
                logger.info(
                    f"Assignment {session.assignment.get('AssignmentId')} found for HIT {hit_id} "
                    f"after {session.attempts} poll(s)"
                )
                return session

        remaining = session.deadline - clock()
        if remaining <= 0:
            logger.info(
                f"No assignment for HIT {hit_id} within {max_wait_seconds}s "
                f"({session.attempts} poll(s))"
            )
            return session

        logger.debug(
            f"Waited {clock() - start:.1f}s of {max_wait_seconds}s for HIT {hit_id}, "
            f"polling again in {min(poll_interval, remaining):.1f}s"
        )
        sleep(min(poll_interval, remaining))
