"""
Streamlit dashboard for the transport order API
"""
