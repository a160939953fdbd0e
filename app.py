"""
Discipline Tracker - Flask Application
JSON API server (frontend is served separately)
"""
from discipline_tracker.config import Config, setup_logging
from discipline_tracker.server import create_app

config = Config()
setup_logging(config.LOG_LEVEL)

app = create_app(config=config)


# ============ MAIN ============

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=config.PORT, debug=config.DEBUG)
