"""Run the review pipeline against a live pull request without posting."""

import asyncio
import sys

from src.core.config import settings
from src.core.logging import configure_logging
from src.services.review.pipeline import ReviewPipeline


async def main() -> None:
    if len(sys.argv) != 4:
        print("Usage: python scripts/test_pipeline.py <owner> <repo> <pr_number>")
        print("Example: python scripts/test_pipeline.py octocat hello-world 123")
        sys.exit(1)

    owner = sys.argv[1]
    repo = sys.argv[2]
    pr_number = int(sys.argv[3])

    configure_logging(settings.log_level)

    print(f"🔍 Reviewing PR #{pr_number} in {owner}/{repo}")
    print("-" * 50)

    pipeline = ReviewPipeline()

    try:
        # post_review=False so nothing is written to GitHub
        result = await pipeline.execute_for_pull_request(
            owner=owner,
            repo=repo,
            pr_number=pr_number,
            post_review=False,
        )

        print("\n✅ Review Complete!")
        print(f"   PR: #{result.pr_number} - {result.pr_title}")
        print(f"   Files Reviewed: {result.files_reviewed}")
        print(f"   Hunks Reviewed: {result.hunks_reviewed}")
        print(f"   Hunks Failed: {result.hunks_failed}")
        print(f"   Comments: {result.total_comments}")

    except Exception as e:
        print(f"\n❌ Error: {e}")
        raise
    finally:
        await pipeline.close()


if __name__ == "__main__":
    asyncio.run(main())
