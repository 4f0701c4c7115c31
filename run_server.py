#!/usr/bin/env python3
"""
PR Lint Server

Simple Flask server exposing the rule evaluator over HTTP.
"""

import os

from pr_lint.config import get_config
from pr_lint.server import create_app

if __name__ == '__main__':
    port = int(os.getenv("PORT", "8000"))
    print("🚀 Starting PR Lint Server...")
    print(f"📍 Server will be available at: http://localhost:{port}")
    print("📋 API Documentation:")
    print("   - Health Check: GET /api/v1/health")
    print("   - Lint Change Set: POST /api/v1/lint")

    create_app().run(
        host='0.0.0.0',
        port=port,
        debug=get_config().debug
    )
