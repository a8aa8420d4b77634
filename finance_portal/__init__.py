"""
Finance Portal
Web front end for the finance backend: projects, bank statement parsing,
utility billing, workbook comparison and GLA variance analysis.
"""
__version__ = '0.1.0'
