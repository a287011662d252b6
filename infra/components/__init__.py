"""
Pulumi component resources for the Lambda application stack.

Each submodule provides reusable ComponentResource classes:
- networking: VPC, subnets, security groups
- storage: RDS PostgreSQL, ECR repository
- compute: Lambda function
- edge: HTTP API Gateway
- security: IAM roles, CI deployment identity
"""
