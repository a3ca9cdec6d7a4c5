"""Selection, search and geolocation controllers."""
from __future__ import annotations

import threading
from typing import Callable

Job = Callable[[], None]
Spawner = Callable[[Job, str], None]


def spawn_thread(job: Job, name: str) -> None:
    """Run *job* on a daemon worker thread."""
    threading.Thread(target=job, daemon=True, name=name).start()
