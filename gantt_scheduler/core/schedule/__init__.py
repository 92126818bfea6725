"""Scheduling passes over a built task graph.

Order of use: topological_sort -> schedule_dates -> calculate_critical_path.
Every pass annotates the Task entries in place; none changes the topology.
"""
