"""Employee Dashboard package.

Feature modules (records, payroll, team, performance, reports) sit on top of a
single audited record store; Flask controllers are a thin JSON layer.
"""
