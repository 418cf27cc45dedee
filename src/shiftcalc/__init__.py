"""shiftcalc - rotation analysis for shift-trade matching, workload metrics and scoring."""
