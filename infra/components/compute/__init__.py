"""Compute components."""

from infra.components.compute.lambda_function import LambdaFunctionComponent, LambdaOutputs

__all__ = ["LambdaFunctionComponent", "LambdaOutputs"]
