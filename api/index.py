"""
Vercel serverless function wrapper for the invitation Flask app
Routes API requests to Flask app endpoints using vercel-python-wsgi

IMPORTANT: Do NOT import Flask app at module level - it causes Vercel handler detection errors
Import it inside the handler function instead
"""
import sys
import os
import json
import traceback


def handler(request):
    """Handle API requests - routes to the Flask app or returns info"""
    # Add parent directory to path inside handler to avoid module-level import issues
    parent_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if parent_dir not in sys.path:
        sys.path.insert(0, parent_dir)

    try:
        from invite_api import app

        try:
            from vercel import wsgi
        except ImportError:
            # Not running on Vercel: describe the service instead
            return {
                'statusCode': 200,
                'headers': {'Content-Type': 'application/json'},
                'body': json.dumps({'message': 'API endpoint - use /api/invitation?i=CODE'})
            }
        return wsgi(app)(request)
    except Exception as e:
        return {
            'statusCode': 500,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps({'error': f'Failed to load Flask app: {e}',
                                'traceback': traceback.format_exc()})
        }
