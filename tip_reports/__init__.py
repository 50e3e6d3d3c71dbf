"""Tip Distribution Reports: report parsing, tip distribution and payout export"""
