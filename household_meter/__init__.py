"""Household meter reading tracker."""
