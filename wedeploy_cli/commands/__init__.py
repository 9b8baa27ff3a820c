"""Click commands of the we CLI"""
