# main.py
from __future__ import annotations

import logging
import os
import traceback

from career.config import DEFAULT_SEED, MATCH_ORACLE_URL, SAVE_DIR
from career.engine import CareerEngine
from career.save import SaveStore


def _write_crash_log(text: str) -> None:
    try:
        os.makedirs(SAVE_DIR, exist_ok=True)
        path = os.path.join(SAVE_DIR, "crash.log")
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        print(f"Crash written to: {os.path.abspath(path)}")
    except OSError:
        print(text)


def build_engine() -> CareerEngine:
    """Local oracle by default; MATCH_ORACLE=remote talks to MATCH_ORACLE_URL."""
    kwargs = {}
    if os.getenv("MATCH_ORACLE", "local").lower() == "remote":
        from matchsim.remote import RemoteCandidateGenerator, RemoteMatchOracle
        kwargs["oracle"] = RemoteMatchOracle(MATCH_ORACLE_URL)
        kwargs["generator"] = RemoteCandidateGenerator()
    seed = int(os.getenv("CAREER_SEED", DEFAULT_SEED))
    return CareerEngine.load_or_new(SaveStore(), seed=seed, **kwargs)


def main() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        from ui.app import App
        from ui.state_office import OfficeState

        engine = build_engine()
        app = App(title="Phoenix FC Manager", engine=engine)
        app.push_state(OfficeState(app, engine))
        app.run()
    except Exception:
        logging.getLogger(__name__).exception("Fatal error")
        _write_crash_log(traceback.format_exc())


if __name__ == "__main__":
    main()
