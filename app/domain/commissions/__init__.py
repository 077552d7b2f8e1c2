"""
Commissions bounded context: domain layer.

This module contains all domain logic for broker costs:
- Operation (buy/sell) commissions
- Monthly custody fees
- Holding-cost projections and break-even analysis
- Broker comparison and commission history analysis
"""
