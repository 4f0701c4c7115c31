"""
HTTP Server

Simple Flask server exposing the rule evaluator over HTTP.
"""

import os
from typing import Optional

from flask import Flask, request, jsonify
from pydantic import ValidationError

from . import __version__
from .api import PRLintAPI
from .config import get_config
from .models import ChangeSetRequest, ReportResponse


def create_app(lint_api: Optional[PRLintAPI] = None) -> Flask:
    """Create the Flask app around a PR Lint API instance."""
    app = Flask(__name__)
    api = lint_api or PRLintAPI(config=get_config(), project_root=os.getenv("PR_LINT_PROJECT_ROOT"))

    @app.route('/api/v1/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        return jsonify({
            'status': 'healthy',
            'service': 'pr-lint',
            'version': __version__,
            'rules': [rule.name for rule in api.evaluator.ordered_rules],
        })

    @app.route('/api/v1/lint', methods=['POST'])
    def lint():
        """Lint a ChangeSet payload."""
        data = request.get_json(silent=True)
        if data is None:
            return jsonify({'error': 'Request body must be JSON', 'status': 'failed'}), 400

        try:
            change_set = ChangeSetRequest.model_validate(data).to_change_set()
        except ValidationError as e:
            return jsonify({'error': str(e), 'status': 'failed'}), 400

        try:
            result = api.lint_change_set(change_set)
        except Exception as e:
            app.logger.exception("Lint run failed")
            return jsonify({'error': str(e), 'status': 'failed'}), 500

        return jsonify({
            'status': 'completed',
            'passed': result.passed,
            'report': ReportResponse.from_report(result.report).model_dump(),
            'records': api.formatter.to_records(result.report),
            'processing_time': result.processing_time,
        })

    return app

