# /app.py

from inspection_capture import app, db
from inspection_capture.models import Inspection, InspectionPhoto, ScanCapture


@app.shell_context_processor
def make_shell_context():
    """Create a shell context for the application -
    for working with the inspection database in the Flask shell"""
    return {'db': db, 'Inspection': Inspection, 'InspectionPhoto': InspectionPhoto, 'ScanCapture': ScanCapture}
