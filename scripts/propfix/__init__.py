"""设计属性迁移修复引擎。"""
