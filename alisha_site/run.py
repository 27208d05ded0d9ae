import os
import sys

try:
    from . import create_app
except ImportError:  # pragma: no cover - fallback when running from alisha_site/ cwd
    from __init__ import create_app

app = create_app()

if __name__ == '__main__':
    port = int(sys.argv[1]) if len(sys.argv) > 1 else int(os.environ.get('PORT') or 5000)
    host = os.environ.get('HOST') or '127.0.0.1'
    print(f" * Serving site content and editor API on http://{host}:{port}")
    app.run(host=host, port=port, debug=False)
