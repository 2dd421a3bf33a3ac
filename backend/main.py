"""
Flare Incident Backend — FastAPI
Modular entry point. All logic is split across:
  config.py, models.py, incident_store.py, location_index.py, risk.py,
  bottom_sheet.py, analysis.py, gemini_client.py, data_fetchers.py,
  board.py, routes.py
"""

import logging

logging.basicConfig(level=logging.INFO)

from routes import create_app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
