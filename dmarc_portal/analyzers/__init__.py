from dmarc_portal.analyzers.policy_evaluator import PolicyEvaluator

__all__ = ["PolicyEvaluator"]
