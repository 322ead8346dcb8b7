"""
AWS Lambda handler — Mangum wrapper for the risk engine API.
"""

from mangum import Mangum

from dropout_risk.main import app

handler = Mangum(app, lifespan="auto")
