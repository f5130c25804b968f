"""
Fire several concurrent document submissions to watch the throttle at work.

    python -m crpt_api.demo --count 3 --signature mySign

With the defaults (2 permits, 5s cooldown) two requests go out at once and
the third waits until one of the first permits has cooled down.
"""
from __future__ import annotations

import argparse
import logging
import threading

from crpt_api.core.config import get_settings
from crpt_api.core.logging import configure_logging
from crpt_api.services.crpt_client import TransportError
from crpt_api.services.crpt_gateway import CrptApi
from crpt_api.services.documents import Document, load_document, load_sample_document
from crpt_api.services.throttle import Throttle

logger = logging.getLogger(__name__)


def _submit(api: CrptApi, document: Document, signature: str) -> None:
    try:
        api.create_document(document, signature)
    except TransportError:
        # already logged by the gateway
        pass


def run(count: int, signature: str, document: Document, api: CrptApi) -> None:
    threads = [
        threading.Thread(target=_submit, args=(api, document, signature), name=f"submit-{i}")
        for i in range(count)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    logger.info("Done: available_permits=%d", api.throttle.available_permits)


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--count", type=int, default=3, help="number of concurrent submissions")
    parser.add_argument("--signature", default=settings.signature or "mySign")
    parser.add_argument("--document", default=None, help="path to a document JSON file")
    parser.add_argument("--verbose", action="store_true", help="log every permit acquire and release")
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else None)

    document = load_document(args.document) if args.document else load_sample_document()
    throttle = Throttle(capacity=settings.rl_capacity, cooldown_s=settings.rl_cooldown_s)

    run(args.count, args.signature, document, CrptApi(throttle))


if __name__ == "__main__":
    main()
