"""
Bank Statements Component
Handles statement uploads, encryption prompts, parsing and parse history
"""
from .batch import BatchStore, UploadBatch
from .routes import bank_statements_bp, init_bank_statements
from .service import BankStatementsService

__all__ = ['bank_statements_bp', 'init_bank_statements', 'BankStatementsService',
           'BatchStore', 'UploadBatch']
