"""Serverless (AWS Lambda) handler using Mangum for FastAPI."""

from mangum import Mangum

from company_news.api.main import app

handler = Mangum(app, lifespan="off")
