import argparse
import asyncio
import logging

from .agents import ADDRESS, run_gather

log = logging.getLogger(__name__)


def args(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="callbarrier",
        description="Fan a probe out to echo agents and gather the responses",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=3,
        help="Echo agent count (default is 3)",
    )
    parser.add_argument(
        "-d",
        "--delay",
        type=float,
        default=0.1,
        help="Maximum response delay of an echo agent in seconds (default is 0.1)",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=10.0,
        help="Seconds to wait for all responses (default is 10)",
    )
    parser.add_argument("--host", default=ADDRESS[0], help="Container host")
    parser.add_argument("--port", type=int, default=ADDRESS[1], help="Container port")
    parser.add_argument("-p", "--payload", default="ping", help="Probe payload")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None):
    parsed = args(argv)
    logging.basicConfig(
        encoding="utf-8", level=logging.DEBUG if parsed.verbose else logging.INFO
    )

    log.info(f"Starting gather over {parsed.workers} echo agent(s)!")
    responses = asyncio.run(
        run_gather(
            parsed.workers,
            parsed.payload,
            addr=(parsed.host, parsed.port),
            delay=parsed.delay,
            timeout=parsed.timeout,
        )
    )
    for response in responses:
        print(f"{response.sender}: {response.payload}")


if __name__ == "__main__":
    main()
