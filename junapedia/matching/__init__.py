from .franchise_matcher import FranchiseMatcher, member_name

__all__ = ["FranchiseMatcher", "member_name"]
