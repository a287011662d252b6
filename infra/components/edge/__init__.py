"""Edge components."""

from infra.components.edge.api_gateway import ApiGatewayOutputs, HttpApiComponent

__all__ = ["HttpApiComponent", "ApiGatewayOutputs"]
