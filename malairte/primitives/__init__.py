"""Transactions, blocks, output scripts and their wire formats."""