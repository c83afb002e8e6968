# Services package init
"""
B.I Booster Backend — Services Layer
======================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Each service is a stateless class with a module-level singleton; the
       database session is passed into every call.

Service Inventory:
    - CatalogService:  Packages, template categories, tier ranking
    - FileService:     Upload validation, storage and lookup
    - AccountService:  Registration, login, member lookup
    - OrderService:    Storefront order form, member order list
    - AdminService:    Payment verification actions, template delivery
    - CourseService:   CMS for modules, chapters, lessons and media
    - LearningService: Member course view, lesson progress, summary
"""
