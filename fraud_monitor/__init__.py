"""
Fraud monitoring backend: prediction webhook and real-time alert push channel
"""
