from .schemas import DeployStatusResponse, ErrorResponse

__all__ = ["DeployStatusResponse", "ErrorResponse"]
