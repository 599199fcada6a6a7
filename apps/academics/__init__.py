"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Academics app: academic years, semesters, departments,
             degrees, subjects and classes.
-------------------------------------------------------------------------
"""
