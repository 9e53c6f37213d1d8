"""
SpeaklyAI: vocabulary practice web app.

Run with ``speakly`` (installed console script) or ``python -m speakly.run``.
"""

import argparse

import uvicorn

from .config import config


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the SpeaklyAI web app")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args(argv)

    if not config.model.api_key:
        print("⚠️  OPENAI_API_KEY not found: level test placement will use the score fallback")
        print("   Create a .env file with your OpenAI API key to enable AI analysis")

    uvicorn.run(
        "speakly.web.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=config.logging.log_level.lower(),
    )


if __name__ == "__main__":
    main()
