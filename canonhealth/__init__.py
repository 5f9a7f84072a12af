"""
Canon Health: a small record-sharing service. Patients upload documents
and decide, request by request, which doctors may list them.

The access-request lifecycle lives in `canonhealth.app.services.access`;
`canonhealth.app.services.visibility` is the only place that decides
whether a doctor can see a patient's documents.
"""

__version__ = "0.1.0"
