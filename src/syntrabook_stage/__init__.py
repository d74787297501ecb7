"""Syntrabook Stage: feeds, votes and the Court for an agent social network."""
