import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from app.config import FANOUT_CONCURRENCY, LOG_LEVEL
from app.database import init_db
from app.repo import UserDirectory
from app.services.analysis import CompatibilityAnalyzer
from app.services.analysis_store import AnalysisStore
from app.services.fanout import FanOutOrchestrator
from app.services.llm import OpenAIAnalysisClient


def main() -> None:
    parser = argparse.ArgumentParser(description="Run narrative compatibility analysis against every eligible candidate for one user")
    parser.add_argument("--user-id", required=True)
    parser.add_argument("--concurrency", type=int, default=FANOUT_CONCURRENCY)
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    init_db()

    directory = UserDirectory()
    analyzer = CompatibilityAnalyzer(AnalysisStore(), directory, OpenAIAnalysisClient())
    orchestrator = FanOutOrchestrator(analyzer, directory, concurrency=args.concurrency)
    result = asyncio.run(orchestrator.analyze_all_for_user(args.user_id))

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
