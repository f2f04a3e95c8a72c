"""Streamlit UI for Steepbook."""
