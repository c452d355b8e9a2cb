from __future__ import annotations
import os

UPDATE_INTERVAL = int(os.environ.get("BUILDTIMELINE_UPDATE_INTERVAL", "60"))
PIPELINE_COUNT = int(os.environ.get("BUILDTIMELINE_PIPELINE_COUNT", "5"))
MAX_PAGES = int(os.environ.get("BUILDTIMELINE_MAX_PAGES", "5"))
MAX_PIPELINE_COUNT = 50
