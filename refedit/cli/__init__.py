"""Command line interface for refedit"""
