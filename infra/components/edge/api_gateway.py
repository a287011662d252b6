"""
API Gateway Component for the Lambda function.

The 5-Resource Chain:
1. API: The HTTP API container.
2. Integration: AWS_PROXY to the function (payload format 2.0).
3. Routes: "ANY /{proxy+}" and "ANY /" both forward to the integration.
4. Stage: "$default" with auto-deploy, giving a clean URL.
5. Permission: lets apigateway.amazonaws.com invoke the function.
"""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from infra.utils.tags import create_tags


@dataclass
class ApiGatewayOutputs:
    """Output values from API Gateway component."""
    api_endpoint: pulumi.Output[str]
    api_id: pulumi.Output[str]


class HttpApiComponent(pulumi.ComponentResource):
    """
    HTTP API in front of a Lambda function.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        function_arn: pulumi.Input[str],
        function_name: pulumi.Input[str],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:edge:HttpApi", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        self.api = aws.apigatewayv2.Api(
            f"{name}-api",
            name=f"{name}-api",
            protocol_type="HTTP",
            tags=create_tags(environment, f"{name}-api"),
            opts=child_opts,
        )

        self.integration = aws.apigatewayv2.Integration(
            f"{name}-integration",
            api_id=self.api.id,
            integration_type="AWS_PROXY",
            integration_method="POST",
            integration_uri=function_arn,
            payload_format_version="2.0",
            opts=child_opts,
        )

        target = self.integration.id.apply(lambda id: f"integrations/{id}")

        # Catch-all route
        self.route = aws.apigatewayv2.Route(
            f"{name}-route",
            api_id=self.api.id,
            route_key="ANY /{proxy+}",
            target=target,
            opts=child_opts,
        )

        self.root_route = aws.apigatewayv2.Route(
            f"{name}-root-route",
            api_id=self.api.id,
            route_key="ANY /",
            target=target,
            opts=child_opts,
        )

        # Default stage with auto-deploy
        self.stage = aws.apigatewayv2.Stage(
            f"{name}-stage",
            api_id=self.api.id,
            name="$default",
            auto_deploy=True,
            tags=create_tags(environment, f"{name}-stage"),
            opts=child_opts,
        )

        self.permission = aws.lambda_.Permission(
            f"{name}-api-invoke",
            action="lambda:InvokeFunction",
            function=function_name,
            principal="apigateway.amazonaws.com",
            source_arn=self.api.execution_arn.apply(lambda arn: f"{arn}/*/*"),
            opts=child_opts,
        )

        self.register_outputs({
            "api_endpoint": self.api.api_endpoint,
            "api_id": self.api.id,
        })

    def get_outputs(self) -> ApiGatewayOutputs:
        """Get API Gateway output values."""
        return ApiGatewayOutputs(
            api_endpoint=self.api.api_endpoint,
            api_id=self.api.id,
        )
