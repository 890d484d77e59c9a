# WSGI entry point, e.g. for Azure App Service
from quotation_generator import create_app

app = create_app()
