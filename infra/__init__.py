"""
Pulumi infrastructure-as-code for the Lambda application stack.

This package defines AWS infrastructure including:
- VPC with public, private-egress and isolated subnets
- RDS PostgreSQL in the isolated subnets
- ECR repository shared by every environment
- Container-image Lambda behind an HTTP API
- GitHub Actions OIDC deployment role

Resources are described as a dependency graph, secured by derived
policies and materialized in topological order.
"""
