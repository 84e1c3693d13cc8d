from .client import ContentAnalysisClient, fallback_response
from .models import AnalysisOutcome, AnalysisRequest, MediaType
